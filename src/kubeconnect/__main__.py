from kubeconnect.cli import app

app(prog_name="kubeconnect")
