from autoschema.cli import app

app(prog_name="autoschema")
