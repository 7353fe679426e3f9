from jinxml.cli import app

app()
