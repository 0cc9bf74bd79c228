"""Test ${...} expression and $variable substitution while parsing."""

import pytest

from clistate import (
    ExpressionResolver,
    SubstitutedLine,
    UnresolvedExpressionError,
    UnresolvedVariableError,
    parse_command,
)


class TestPropertyExpressions:

    def test_not_resolved_by_default(self):
        command = parse_command('ls ${x}', properties={'x': 'abc'})
        assert command.positional_arguments() == ['${x}']

    def test_resolved(self):
        command = parse_command('ls ${x}', resolve_system_properties=True, properties={'x': 'abc'})
        assert command.positional_arguments() == ['abc']
        assert command.original_line == 'ls ${x}'
        assert command.substituted_line == 'ls abc'

    def test_resolved_in_address(self):
        command = parse_command(
            '/subsystem=${name}:read-resource',
            resolve_system_properties=True,
            properties={'name': 'logging'},
        )
        assert command.address[0].name == 'logging'

    def test_resolved_inside_quotes(self):
        command = parse_command('ls "${x}"', resolve_system_properties=True, properties={'x': 'abc'})
        assert command.positional_arguments() == ['"abc"']

    def test_first_defined_name_wins(self):
        command = parse_command('ls ${a,b}', resolve_system_properties=True, properties={'b': 'B'})
        assert command.positional_arguments() == ['B']

    def test_default_value(self):
        command = parse_command('ls ${missing:def}', resolve_system_properties=True)
        assert command.positional_arguments() == ['def']

    def test_nested_default(self):
        command = parse_command(
            'ls ${missing:${other}}', resolve_system_properties=True, properties={'other': 'o'}
        )
        assert command.positional_arguments() == ['o']

    def test_environment(self, monkeypatch):
        monkeypatch.setenv('CLISTATE_TEST_HOME', '/tmp/home')
        command = parse_command('ls ${env.CLISTATE_TEST_HOME}', resolve_system_properties=True)
        assert command.positional_arguments() == ['/tmp/home']

    def test_unresolved_strict(self):
        with pytest.raises(UnresolvedExpressionError) as exc_info:
            parse_command('ls ${missing}', resolve_system_properties=True)
        assert exc_info.value.offset == 3
        assert exc_info.value.expression == '${missing}'

    def test_unresolved_lenient(self):
        command = parse_command('ls ${missing}', strict=False, resolve_system_properties=True)
        assert command.positional_arguments() == ['${missing}']

    def test_unclosed_expression_strict(self):
        with pytest.raises(UnresolvedExpressionError):
            parse_command('ls ${x', resolve_system_properties=True, properties={'x': 'abc'})


class TestVariables:

    def test_not_resolved_without_variables(self):
        command = parse_command('cd $dir')
        assert command.positional_arguments() == ['$dir']

    def test_resolved(self):
        command = parse_command('cd $dir', variables={'dir': '/a=b'})
        assert command.positional_arguments() == ['/a=b']

    def test_empty_replacement_exposes_next_variable(self):
        command = parse_command('ls $e$f', variables={'e': '', 'f': 'x'})
        assert command.positional_arguments() == ['x']
        assert len(command.line.substitutions) == 2

    def test_unknown_variable_strict(self):
        with pytest.raises(UnresolvedVariableError) as exc_info:
            parse_command('cd $nope', variables={})
        assert exc_info.value.offset == 3

    def test_unknown_variable_lenient(self):
        command = parse_command('cd $nope', strict=False, variables={})
        assert command.positional_arguments() == ['$nope']

    def test_not_resolved_in_back_quotes(self):
        command = parse_command('ls `$dir`', variables={'dir': 'x'})
        assert command.positional_arguments() == ['`$dir`']

    def test_not_resolved_after_escape(self):
        command = parse_command('ls \\$dir', variables={'dir': 'x'})
        assert command.positional_arguments() == ['\\$dir']


class TestSubstitutedLine:

    def test_offsets_after_substitution(self):
        command = parse_command('ls ${x} -y', resolve_system_properties=True, properties={'x': 'abcdef'})
        line = command.line
        assert line.substituted == 'ls abcdef -y'
        assert line.original_offset(10) == 8
        assert line.substituted_offset(8) == 10
        assert line.original_offset(1) == 1

    def test_no_substitution(self):
        line = SubstitutedLine('abc')
        assert str(line) == 'abc'
        assert line.original_offset(2) == 2
        assert line.substituted_offset(2) == 2


class TestExpressionResolver:

    def test_resolve_text(self):
        resolver = ExpressionResolver({'a': '1', 'b': '2'})
        assert resolver.resolve_text('${a}-${b}', strict=True) == '1-2'

    def test_resolve_text_unresolved_lenient(self):
        resolver = ExpressionResolver()
        assert resolver.resolve_text('${a}', strict=False) is None

    def test_variable_name_stops_at_non_word(self):
        resolver = ExpressionResolver(variables={'a': 'x'})
        assert resolver.resolve_variable('$a/b', 0, strict=True) == ('$a', 'x')

    def test_dollar_without_name(self):
        resolver = ExpressionResolver(variables={})
        assert resolver.resolve_variable('$1', 0, strict=True) is None
