from mpscope.cli import cli

cli()
