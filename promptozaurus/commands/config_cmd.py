"""
ConfigCommand — Configuration display and updates
"""

from ..commands.base import BaseCommand
from ..presentation.template import OutputTemplate


class ConfigCommand(BaseCommand):
    """Show or change configuration."""

    def show_config(self) -> int:
        template = OutputTemplate(symbols=self.symbols)
        template.header("PROMPTOZAURUS CONFIG", "Current Configuration")
        template.section("SETTINGS", self.config_manager.display())
        print(template.render())
        return 0

    def get_config(self, key: str) -> int:
        value = self.config_manager.get(key)
        if value is None:
            return self.error(f"Unknown setting: {key}")
        print(value)
        return 0

    def set_config(self, key: str, value: str, scope: str = "project") -> int:
        """Set a configuration value."""
        symbols = self.symbols
        error = self.config_manager.set(key, value, scope)

        template = OutputTemplate(symbols=symbols)
        if error:
            template.header("PROMPTOZAURUS CONFIG", "Error")
            template.section("ERROR", error)
            print(template.render())
            return 1

        template.header("PROMPTOZAURUS CONFIG", "Configuration Updated")
        template.section("SETTING", f"Set {key} = {value}")
        if scope == "project":
            template.section("SAVED TO", str(self.config_manager.project_config_path))
        else:
            template.section("SAVED TO", str(self.config_manager.user_config_path))
        template.footer(f"{symbols.check_pass} Configuration saved")
        print(template.render())
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'config'


def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('--set', metavar='KEY=VALUE',
                   help='Set config value (e.g., gateway.provider=anthropic)')
    p.add_argument('--get', metavar='KEY', help='Print one config value')
    p.add_argument('--user', action='store_true',
                   help='Apply to user config instead of project')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    if args.set:
        if '=' not in args.set:
            print("Error: Use format KEY=VALUE (e.g., gateway.provider=anthropic)")
            return 1
        key, value = args.set.split('=', 1)
        scope = "user" if args.user else "project"
        return cli._config_cmd.set_config(key, value, scope)
    if args.get:
        return cli._config_cmd.get_config(args.get)
    return cli._config_cmd.show_config()
