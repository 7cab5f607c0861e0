"""

Command line utility to validate JSON documents against JSON schemas and to generate code from schemas.

"""


import argparse
import json
import logging
import os
import sys
import tempfile

from jsonsval import _version

logger = logging.getLogger(__name__)

ARG_TYPES = {'str': str, 'int': int}


def load_commands():
    """Load the commands from the commands.json file."""
    commands_path = os.path.join(os.path.dirname(__file__), 'commands.json')
    with open(commands_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def create_subparsers(subparsers, commands):
    """Create subparsers for the commands."""
    for command in commands:
        cmd_parser = subparsers.add_parser(command['command'], help=command['description'])
        for arg in command['args']:
            kwargs = {
                'help': arg['help'],
            }
            if 'nargs' in arg:
                kwargs['nargs'] = arg['nargs']
            if 'choices' in arg:
                kwargs['choices'] = arg['choices']
            if 'default' in arg:
                kwargs['default'] = arg['default']
            if arg['type'] == 'bool':
                kwargs['action'] = 'store_true'
            else:
                kwargs['type'] = ARG_TYPES[arg['type']]
            carg = cmd_parser.add_argument(arg['name'], **kwargs)
            if arg['name'].startswith('--'):
                carg.required = arg.get('required', True)


def dynamic_import(module, func):
    """Dynamically import a module and function."""
    mod = __import__(module, fromlist=[func])
    return getattr(mod, func)


def spool_stdin() -> str:
    """Copy standard input into a temporary file and return its path."""
    with tempfile.NamedTemporaryFile(delete=False, mode='w', encoding='utf-8', suffix='.json') as spool:
        spool.write(sys.stdin.read())
        return spool.name


def function_args(command, args, input_path, output_path) -> dict:
    """Map the parsed arguments onto the keyword arguments of the command's function."""
    call_args = {}
    for name, source in command['function']['args'].items():
        if source == 'input_file_path':
            call_args[name] = input_path
        elif source == 'output_file_path':
            call_args[name] = output_path
        elif source.startswith('args.'):
            if hasattr(args, source[5:]):
                call_args[name] = getattr(args, source[5:])
        else:
            call_args[name] = source
    return call_args


def run_command(command, args):
    """
    Run one command from commands.json.

    Commands marked `stdin_input` read standard input when no input file is
    given. Commands marked `capture_output` write to a temporary file that is
    copied to standard output when `--out` is omitted.
    """
    temporary_files = []
    input_path = getattr(args, 'input', None)
    if input_path is None and command.get('stdin_input', False):
        input_path = spool_stdin()
        temporary_files.append(input_path)
    output_path = getattr(args, 'out', None)
    to_stdout = output_path is None and command.get('capture_output', False)
    if to_stdout:
        with tempfile.NamedTemporaryFile(delete=False, suffix='.out') as target:
            output_path = target.name
        temporary_files.append(output_path)
    try:
        module_name, func_name = command['function']['name'].rsplit('.', 1)
        func = dynamic_import(module_name, func_name)
        logger.info('%s: %s', command['description'], input_path)
        func(**function_args(command, args, input_path, output_path))
        if to_stdout:
            with open(output_path, 'r', encoding='utf-8') as f:
                sys.stdout.write(f.read())
    finally:
        for path in temporary_files:
            try:
                os.remove(path)
            except OSError as e:
                logger.warning('Could not delete temporary file %s: %s', path, e)


def main():
    """Main function for the command line utility."""
    commands = load_commands()
    parser = argparse.ArgumentParser(description='Validate JSON documents against JSON schemas.')
    parser.add_argument('--version', action='store_true', help='Print the version of jsonsval.')
    parser.add_argument('--verbose', action='store_true', help='Log debug information.')
    create_subparsers(parser.add_subparsers(dest='command'), commands)

    args = parser.parse_args()
    if getattr(args, 'version', False):
        print(f'jsonsval {_version.version}')
        return
    if args.command is None:
        parser.print_help()
        return

    logging.basicConfig(level=logging.DEBUG if getattr(args, 'verbose', False) else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    command = next(cmd for cmd in commands if cmd['command'] == args.command)
    try:
        run_command(command, args)
    except Exception as e:  # pylint: disable=broad-exception-caught
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
