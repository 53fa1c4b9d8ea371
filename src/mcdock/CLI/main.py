# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for mcdock.
"""
from typing import Callable, Dict
import click
from .. import __version__
from ..BUILDERS.image_builder import ImageBuilder
from ..MANAGERS.instance_manager import InstanceManager
from ..MODELS.server_config import ServerConfig
from ..PARSERS.config_loader import ConfigLoader
from ..RUNNERS.process_runner import CommandRunner
from ..errors import ConfigError

VERBS = [
    ('install', 'Install a server by building a docker image.'),
    ('create', 'Create a server instance (docker container).'),
    ('start', 'Start the server.'),
    ('console', 'Access the server console.'),
    ('shell', 'Access server container shell (as container root).'),
    ('stop', '(DEPRECATED! Use `console` if possible!) Force the server to stop.'),
    ('reset-perm', 'Reset the server instance directory permissions for host access.'),
    ('retire', 'Remove the server instance.'),
    ('uninstall', 'Uninstall the server image from docker.'),
]


class OperatorCommand(click.Command):
    """
    Command whose only usage error, ``--conf`` without a value, exits with 1.
    Unknown options and trailing arguments are left for the dispatcher.
    """
    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def show_help(prog_name: str) -> bool:
    """
    Prints the list of verbs.
    """
    click.echo(f"Minecraft Rootless Docker Operator v{__version__}")
    click.echo("")
    click.echo(f"Usage: {prog_name} <command> [--conf </path/to/conf.json>]")
    for verb, description in VERBS:
        click.echo(f"  {verb:12} - {description}")
    click.echo("")
    click.echo("You must check (and edit if needed) the configuration file `conf.json` "
               "before launching this tool!")
    return True


def build_commands(config: ServerConfig,
                   runner: CommandRunner,
                   prog_name: str = "mcdock") -> Dict[str, Callable[[], bool]]:
    """
    Maps each verb to the operation it runs.
    """
    builder = ImageBuilder(config, runner)
    instance = InstanceManager(config, runner)
    return {
        'help': lambda: show_help(prog_name),
        'install': builder.install,
        'create': instance.create,
        'start': instance.start,
        'console': instance.attach,
        'stop': instance.stop,
        'reset-perm': instance.reset_perm,
        'retire': instance.retire,
        'shell': instance.shell,
        'uninstall': instance.uninstall,
    }


@click.command(cls=OperatorCommand, context_settings={
    'help_option_names': [],
    'ignore_unknown_options': True,
    'allow_extra_args': True,
})
@click.argument('verb', required=False)
@click.option('--conf', 'conf_path', help='Path to conf.json')
@click.pass_context
def cli(ctx, verb, conf_path):
    """
    mcdock - Minecraft Rootless Docker Operator.

    Runs a single VERB against the configured server image and container.
    """
    ctx.ensure_object(dict)

    try:
        config = ConfigLoader().load(conf_path)
    except ConfigError as e:
        click.echo(str(e), err=True)
        ctx.exit(1)

    runner = ctx.obj.get('runner') or CommandRunner(config.engine)
    commands = build_commands(config, runner, prog_name=ctx.info_name or "mcdock")

    command = commands.get(verb.lower()) if verb else None
    if command is None:
        command = commands['help']

    ctx.exit(0 if command() else 1)


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
