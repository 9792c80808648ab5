from unwrap_relay.cmd.cli import app

app(prog_name="unwrap-relay")
