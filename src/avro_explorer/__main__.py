from avro_explorer.cli import app

app(prog_name="avro-explorer")
