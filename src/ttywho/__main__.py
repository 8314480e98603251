from ttywho.cli import run

run()
