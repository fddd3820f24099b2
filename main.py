import logging

from rich.logging import RichHandler
from rich.pretty import pprint

from argscope import *

__prog__ = "fubar"

schema = Schema(title="Fubar", purpose="Copy or list the files of a directory.")
schema.add_flag("verbose", "Log what is being done", short_key="v")
schema.add_keyword("log-level", "Logging level", short_key="l", default="warning",
                   validation=["debug", "info", "warning", "error"])

action = schema.add_command("action", "What to do")
copy = action.command("copy", "Copy a file")
copy.schema.add_positional("source", "File to copy")
copy.schema.add_positional("target", "Destination", default=".")
copy.schema.add_flag("force", "Overwrite existing files", short_key="f")
action.command("list", "List the files")

schema.add_rest("files", "Files to restrict the action to", required=False)


if __name__ == '__main__':
    arguments = Parser(schema).parse().unwrap(shell=True)
    logging.basicConfig(level=arguments.log_level.upper(), handlers=[RichHandler()], format="%(message)s")
    pprint(arguments)
