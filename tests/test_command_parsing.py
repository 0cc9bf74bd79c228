"""
Command Parsing Tests - Events reported for addresses, operations and arguments.
"""

import pytest

from clistate import (
    COMMAND_FORMAT,
    AddressNode,
    ArgumentValueNotFinishedError,
    CommandFormatError,
    CommandParserHandler,
    OperationFormatError,
    ParsedArgument,
    ParsedCommand,
    parse_arguments,
    parse_command,
    parse_headers,
)


class CaptureHandler(CommandParserHandler):
    """Test handler to capture callbacks."""

    def __init__(self):
        self.calls = []

    def on_format(self, format):
        self.calls.append(('format',))

    def on_root_node(self, index):
        self.calls.append(('root_node', index))

    def on_parent_node(self, index):
        self.calls.append(('parent_node', index))

    def on_node_type(self, index, node_type):
        self.calls.append(('node_type', index, node_type))

    def on_node_type_name_separator(self, index):
        self.calls.append(('node_type_name_separator', index))

    def on_node_name(self, index, node_name):
        self.calls.append(('node_name', index, node_name))

    def on_node_type_or_name(self, index, type_or_name):
        self.calls.append(('node_type_or_name', index, type_or_name))

    def on_node_separator(self, index):
        self.calls.append(('node_separator', index))

    def on_address_operation_separator(self, index):
        self.calls.append(('address_operation_separator', index))

    def on_operation_name(self, index, operation_name):
        self.calls.append(('operation_name', index, operation_name))

    def on_argument_name(self, index, name):
        self.calls.append(('argument_name', index, name))

    def on_name_value_separator(self, index):
        self.calls.append(('name_value_separator', index))

    def on_argument(self, name, value, start, end):
        self.calls.append(('argument', name, value, start, end))

    def on_argument_separator(self, index):
        self.calls.append(('argument_separator', index))

    def on_property_list_start(self, index):
        self.calls.append(('property_list_start', index))

    def on_property_list_end(self, index):
        self.calls.append(('property_list_end', index))

    def on_output_target(self, index, target):
        self.calls.append(('output_target', index, target))

    def on_header_list_start(self, index):
        self.calls.append(('header_list_start', index))

    def on_header_list_end(self, index):
        self.calls.append(('header_list_end', index))

    def on_header_name(self, index, name):
        self.calls.append(('header_name', index, name))

    def on_header(self, name, value, index):
        self.calls.append(('header', name, value, index))

    def on_header_separator(self, index):
        self.calls.append(('header_separator', index))


def prefixed():
    return ParsedCommand(prefix=[AddressNode('a', 'b')])


def capture(line, **kwargs):
    handler = CaptureHandler()
    parse_command(line, handler, **kwargs)
    return handler.calls


class TestAddressEvents:

    def test_operation_on_address(self):
        assert capture('/subsystem=logging:read-resource') == [
            ('format',),
            ('root_node', 0),
            ('node_type', 1, 'subsystem'),
            ('node_type_name_separator', 10),
            ('node_name', 11, 'logging'),
            ('address_operation_separator', 18),
            ('operation_name', 19, 'read-resource'),
        ]

    def test_operation_without_address(self):
        assert capture(':read-resource') == [
            ('format',),
            ('address_operation_separator', 0),
            ('operation_name', 1, 'read-resource'),
        ]

    def test_nodes_without_names(self):
        assert capture('/a/b') == [
            ('format',),
            ('root_node', 0),
            ('node_type_or_name', 1, 'a'),
            ('node_separator', 2),
            ('node_type_or_name', 3, 'b'),
        ]

    def test_parent_and_current_nodes(self):
        assert capture('./a=b/..') == [
            ('format',),
            ('node_separator', 1),
            ('node_type', 2, 'a'),
            ('node_type_name_separator', 3),
            ('node_name', 4, 'b'),
            ('node_separator', 5),
            ('parent_node', 6),
        ]


class TestArgumentEvents:

    def test_command_with_arguments(self):
        assert capture('ls -l --name=value pos') == [
            ('format',),
            ('operation_name', 0, 'ls'),
            ('argument_separator', 2),
            ('argument_name', 3, '-l'),
            ('argument_separator', 5),
            ('argument', '--name', 'value', 6, 18),
            ('argument_separator', 18),
            ('argument', None, 'pos', 19, 22),
        ]

    def test_name_value_separator_without_value(self):
        assert capture(':op -name=') == [
            ('format',),
            ('address_operation_separator', 0),
            ('operation_name', 1, 'op'),
            ('argument_separator', 3),
            ('argument_name', 4, '-name'),
            ('name_value_separator', 9),
        ]

    def test_value_keeps_quotes_and_escapes(self):
        calls = capture('echo "a \\" b" `c d`')
        arguments = [call for call in calls if call[0] == 'argument']
        assert arguments == [
            ('argument', None, '"a \\" b"', 5, 13),
            ('argument', None, '`c d`', 14, 19),
        ]


class TestParsedCommand:

    def test_address_and_operation(self):
        command = parse_command('/subsystem=logging/logger=org.jboss:write-attribute -name=level')
        assert command.address == [AddressNode('subsystem', 'logging'), AddressNode('logger', 'org.jboss')]
        assert command.operation_name == 'write-attribute'
        assert command.is_operation()
        assert command.format is COMMAND_FORMAT
        assert command.named_arguments() == {'-name': 'level'}

    def test_command_arguments(self):
        command = parse_command('ls -l --name=value pos')
        assert command.operation_name == 'ls'
        assert not command.is_operation()
        assert not command.has_address()
        assert command.named_arguments() == {'-l': None, '--name': 'value'}
        assert command.positional_arguments() == ['pos']
        assert command.arguments[1] == ParsedArgument('--name', 'value', 6, 18, 1)

    def test_argument_lookup(self):
        command = parse_command('ls -l --name=value pos')
        argument = command.get_argument('--name')
        assert argument.value_start == 13
        assert command.has_argument('-l')
        assert not command.has_argument('name')
        assert command.get_argument('pos') is None

    def test_value_with_equals(self):
        command = parse_command('cmd -a=b=c')
        assert command.named_arguments() == {'-a': 'b=c'}

    def test_quoted_node_name(self):
        command = parse_command('/a="x/y:z":op')
        assert command.address == [AddressNode('a', 'x/y:z')]
        assert command.operation_name == 'op'

    def test_escaped_node_name(self):
        command = parse_command('/a=x\\:y:op')
        assert command.address == [AddressNode('a', 'x:y')]

    def test_type_then_name_without_equals(self):
        command = parse_command('/a/b:op')
        assert command.address == [AddressNode('a', 'b')]

    def test_parent_node(self):
        command = parse_command('/a=b/c=d/..:op')
        assert command.address == [AddressNode('a', 'b')]

    def test_parent_of_root_fails(self):
        with pytest.raises(OperationFormatError):
            parse_command('..:op')

    def test_node_type_without_name_fails(self):
        with pytest.raises(OperationFormatError) as exc_info:
            parse_command('/a=b/c/d=e:op')
        assert "node name for 'c'" in str(exc_info.value)
        assert exc_info.value.offset == 7

    @pytest.mark.parametrize('line', [
        '/subsystem=logging/logger:read-resource',
        '/subsystem=logging/logger=:read-resource',
    ])
    def test_operation_after_node_without_name_fails(self, line):
        with pytest.raises(OperationFormatError):
            parse_command(line)

    def test_empty_quoted_node_name_fails(self):
        with pytest.raises(OperationFormatError) as exc_info:
            parse_command('/a="":op')
        assert 'Node name is missing' in str(exc_info.value)

    def test_whitespace_around_address_separators(self):
        command = parse_command('   / subsystem  =  logging  :  read-resource')
        assert command.address == [AddressNode('subsystem', 'logging')]
        assert command.operation_name == 'read-resource'
        assert command.arguments == []

    def test_relative_address_extends_prefix(self):
        command = parse_command('./c=d:op', prefixed())
        assert command.address == [AddressNode('a', 'b'), AddressNode('c', 'd')]

    def test_parent_of_prefix(self):
        command = parse_command('..:op', prefixed())
        assert command.address == []

    def test_absolute_address_replaces_prefix(self):
        command = parse_command('/x=y:op', prefixed())
        assert command.address == [AddressNode('x', 'y')]
        assert command.prefix == [AddressNode('a', 'b')]

    def test_parse_arguments_only(self):
        command = parse_arguments('-a=1 b')
        assert command.operation_name is None
        assert command.format is None
        assert command.named_arguments() == {'-a': '1'}
        assert command.positional_arguments() == ['b']
        assert command.arguments[1].index == 1


class TestCompletionState:
    """What the end of a partial line looks like."""

    def test_root(self):
        command = parse_command('/', strict=False)
        assert command.ends_on_node_separator()
        assert command.address == []

    def test_after_node_type(self):
        command = parse_command('/subsystem=', strict=False)
        assert command.ends_on_node_type_name_separator()
        assert command.ends_on_type()
        assert command.last_separator_index == 10

    def test_after_node(self):
        command = parse_command('/subsystem=logging/', strict=False)
        assert command.ends_on_node_separator()
        assert command.last_separator_index == 18
        assert not command.ends_on_type()

    def test_after_address(self):
        command = parse_command('/subsystem=logging:', strict=False)
        assert command.ends_on_address_operation_separator()
        assert command.operation_name is None

    def test_after_operation(self):
        command = parse_command(':read-resource ', strict=False)
        assert command.ends_on_argument_separator()
        assert command.last_separator_index == 14

    def test_after_name_value_separator(self):
        command = parse_command(':op -name=', strict=False)
        assert command.ends_on_name_value_separator()
        assert command.arguments == [ParsedArgument('-name', '', 4, 10, 0)]

    def test_in_argument_name(self):
        command = parse_command(':op -nam', strict=False)
        assert not command.ends_on_separator()
        assert command.last_chunk_index == 4

    def test_in_argument_value(self):
        command = parse_command(':op -name=va', strict=False)
        assert not command.ends_on_separator()
        assert command.last_chunk_index == 10

    def test_in_operation_name(self):
        command = parse_command('/a=b:read-re', strict=False)
        assert command.last_chunk_index == 5
        assert command.operation_name == 'read-re'


class TestPropertyList:
    """Operation properties given as (name=value, ...)."""

    def test_events(self):
        assert capture(':op(a=1,b)') == [
            ('format',),
            ('address_operation_separator', 0),
            ('operation_name', 1, 'op'),
            ('property_list_start', 3),
            ('argument', 'a', '1', 4, 7),
            ('argument_separator', 7),
            ('argument', 'b', 'true', 8, 9),
            ('property_list_end', 9),
        ]

    def test_operation_with_property(self):
        command = parse_command('/subsystem=logging:read-resource(recursive=true)')
        assert command.address == [AddressNode('subsystem', 'logging')]
        assert command.operation_name == 'read-resource'
        assert command.has_property_list()
        assert command.named_arguments() == {'recursive': 'true'}
        assert command.arguments[0].in_property_list
        assert command.ends_on_property_list_end()

    def test_empty_list(self):
        command = parse_command(':read-resource()')
        assert command.has_property_list()
        assert command.arguments == []

    def test_composite_value_is_kept_whole(self):
        value = (
            '[{"operation"=>"add-system-property","name"=>"test","value"="newValue"},'
            '{"operation"=>"add-system-property","name"=>"test2","value"=>"test2"}]'
        )
        command = parse_command(':composite(steps=' + value + ')')
        assert not command.has_address()
        assert command.operation_name == 'composite'
        assert command.named_arguments() == {'steps': value}

    def test_whitespace_around_separators(self):
        command = parse_command(
            '   / subsystem  =  logging  :  read-resource  '
            '( recursive = true , another = "   " )   '
        )
        assert command.address == [AddressNode('subsystem', 'logging')]
        assert command.operation_name == 'read-resource'
        assert command.named_arguments() == {'recursive': 'true', 'another': '"   "'}
        assert command.positional_arguments() == []

    def test_escaped_quotes_in_value(self):
        command = parse_command(
            '/subsystem=logging/console-handler=CONSOLE:write-attribute'
            '(name=filter-spec, value="substituteAll(\\"JBAS\\",\\"DUMMY\\")")'
        )
        assert command.address[1] == AddressNode('console-handler', 'CONSOLE')
        assert command.named_arguments() == {
            'name': 'filter-spec',
            'value': '"substituteAll(\\"JBAS\\",\\"DUMMY\\")"',
        }

    def test_value_starting_with_greater_than(self):
        command = parse_command(':add(keystore=>{password=1234test,url=/Users/xxx/clientcert.jks})')
        assert command.named_arguments() == {
            'keystore': '>{password=1234test,url=/Users/xxx/clientcert.jks}',
        }

    def test_inner_whitespace_of_value_is_kept(self):
        command = parse_command('/system-property=test:add(value= ha ha ha)')
        assert command.named_arguments() == {'value': 'ha ha ha'}

    def test_implicit_boolean_values(self):
        command = parse_command(
            '/subsystem=logging:read-resource(prop1,prop2,prop3=toto,prop4,!prop5,prop6=true,!prop7)'
        )
        assert command.named_arguments() == {
            'prop1': 'true',
            'prop2': 'true',
            'prop3': 'toto',
            'prop4': 'true',
            'prop5': 'false',
            'prop6': 'true',
            'prop7': 'false',
        }

    def test_negation_with_whitespace(self):
        command = parse_command('/subsystem=logging:read-resource( ! prop1    , ! prop2        )')
        assert command.named_arguments() == {'prop1': 'false', 'prop2': 'false'}

    def test_double_negation_fails(self):
        with pytest.raises(CommandFormatError):
            parse_command('/subsystem=logging:read-resource( !! prop1    , ! prop2    ')

    def test_unclosed_list_fails(self):
        with pytest.raises(ArgumentValueNotFinishedError) as exc_info:
            parse_command('/subsystem=logging:read-resource( prop1    , prop2        ')
        assert exc_info.value.offset == 32
        assert exc_info.value.delimiter == ')'

    def test_unclosed_list_lenient(self):
        command = parse_command('/subsystem=logging:read-resource( prop1    , prop2        ', strict=False)
        assert command.named_arguments() == {'prop1': 'true', 'prop2': 'true'}
        assert isinstance(command.error, ArgumentValueNotFinishedError)
        assert command.error.delimiter == ')'

    def test_open_quote_lenient(self):
        command = parse_command('./subsystem=logging:add(a="', strict=False)
        assert command.address == [AddressNode('subsystem', 'logging')]
        assert command.operation_name == 'add'
        assert command.arguments[-1].name == 'a'
        assert command.arguments[-1].value == '"'

    def test_name_value_separator_without_value(self):
        command = parse_command(':op(a=', strict=False)
        assert command.ends_on_name_value_separator()
        assert command.arguments == [ParsedArgument('a', '', 4, 6, 0, True)]

    def test_ends_on_list_start(self):
        command = parse_command(':op(', strict=False)
        assert command.ends_on_property_list_start()
        assert command.has_property_list()

    def test_commands_keep_parentheses_in_values(self):
        command = parse_command('ls -a=(x,y)')
        assert command.named_arguments() == {'-a': '(x,y)'}
        assert not command.has_property_list()


class TestHeaders:
    """Operation headers given as {name=value; ...}."""

    def test_events(self):
        assert capture(':op{a=b; c d}') == [
            ('format',),
            ('address_operation_separator', 0),
            ('operation_name', 1, 'op'),
            ('header_list_start', 3),
            ('header', 'a', 'b', 4),
            ('header_separator', 7),
            ('header', 'c', 'd', 9),
            ('header_list_end', 12),
        ]

    def test_headers_after_properties(self):
        command = parse_command(
            '/a=b:write(x=1){allow-resource-service-restart=true; '
            'rollout main-group(rolling-to-servers=false), other}'
        )
        assert command.named_arguments() == {'x': '1'}
        assert command.headers == {
            'allow-resource-service-restart': 'true',
            'rollout': 'main-group(rolling-to-servers=false), other',
        }
        assert command.has_header('rollout')
        assert command.is_request_complete()

    def test_whitespace_before_list_and_around_equals(self):
        command = parse_command(':read-resource {blocking-timeout = 5}')
        assert command.operation_name == 'read-resource'
        assert command.headers == {'blocking-timeout': '5'}

    def test_parse_headers(self):
        command = parse_headers('{rollout main-group; blocking-timeout=5}')
        assert command.headers == {'rollout': 'main-group', 'blocking-timeout': '5'}
        assert command.operation_name is None
        assert command.is_request_complete()

    def test_unclosed_list_fails(self):
        with pytest.raises(ArgumentValueNotFinishedError) as exc_info:
            parse_command(':op{a=b')
        assert exc_info.value.offset == 3
        assert exc_info.value.delimiter == '}'

    def test_header_name_being_typed(self):
        command = parse_command(':op{roll', strict=False)
        assert command.last_header_name == 'roll'
        assert command.has_headers()
        assert not command.is_request_complete()

    def test_ends_on_separators(self):
        assert parse_command(':op{', strict=False).ends_on_header_list_start()
        command = parse_command(':op{a=b; ', strict=False)
        assert command.ends_on_header_separator()
        assert command.headers == {'a': 'b'}

    def test_missing_header_name_fails(self):
        with pytest.raises(OperationFormatError):
            parse_command(':op{=b}')


class TestOutputTarget:

    def test_operation_output(self):
        command = parse_command(':read-resource(recursive) > out.txt')
        assert command.named_arguments() == {'recursive': 'true'}
        assert command.output_target == 'out.txt'

    def test_command_output(self):
        calls = capture('ls -l > a b')
        assert calls[-2:] == [('argument_separator', 5), ('output_target', 6, 'a b')]
