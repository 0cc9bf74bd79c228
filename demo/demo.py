import sys
sys.path.insert(0, '..')

from clistate import CommandParserHandler, parse_command, parse_headers, parse_partial_value, parse_value


lines = [
    '/subsystem=logging/logger=org.jboss:write-attribute -name=level -value="DEBUG"',
    'deploy ./app.war --name=app --runtime-name="app v2.war" --headers={rollout=[a, b]}',
    '/subsystem=logging:read-resource(recursive=true,include-runtime)',
    ':write-attribute(name=level, value=DEBUG){allow-resource-service-restart=true} > out.txt',
    'ls -l /subsystem=undertow',
]


class PrintingHandler(CommandParserHandler):
    def on_node_type(self, index, node_type):
        print(f"  [{index:3}] node type      {node_type}")

    def on_node_name(self, index, node_name):
        print(f"  [{index:3}] node name      {node_name}")

    def on_operation_name(self, index, operation_name):
        print(f"  [{index:3}] operation      {operation_name}")

    def on_argument_name(self, index, name):
        print(f"  [{index:3}] flag           {name}")

    def on_argument(self, name, value, start, end):
        label = name or '(positional)'
        print(f"  [{start:3}] argument       {label} = {value}")

    def on_header(self, name, value, index):
        print(f"  [{index:3}] header         {name} = {value}")

    def on_output_target(self, index, target):
        print(f"  [{index:3}] output         {target}")


for line in lines:
    print(line)
    parse_command(line, PrintingHandler())
    print()

command = parse_command(lines[1])
print("Round trip:", command.to_line())
print("Headers:", parse_value(command.named_arguments()['--headers']))
print("Operation headers:", parse_headers('{rollout main-group; blocking-timeout=5}').headers)
print()

partial = '/subsystem=logging:write-attribute -name="lev'
command = parse_command(partial, strict=False)
value = command.arguments[-1]
print(partial)
print("  unfinished:", command.error)
print("  completing:", parse_partial_value(value.value), "at", value.value_start)
