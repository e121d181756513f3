import asyncio
from typing import Optional
import typer
import uvicorn
from face_auth.app.config import load_config
from face_auth.app.errors import FaceAuthError
from face_auth.app.log import setup_logging
from face_auth.db import TemplateStore
from face_auth.models import ensure_model
from face_auth.pipeline.session import build_session


app = typer.Typer(name="face-auth")


def _run_one_shot(config: Optional[str], op: str):
    cfg = load_config(config)
    setup_logging(cfg.log_level)

    async def _go():
        session = build_session(cfg)
        try:
            await session.start()
            if op == "enroll":
                return await session.enroll_face()
            return await session.authenticate_face()
        finally:
            await session.shutdown()

    try:
        return asyncio.run(_go())
    except FaceAuthError as e:
        typer.echo(f"{type(e).__name__}: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def api(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI service."""
    uvicorn.run("face_auth.api.server:create_app", factory=True, host=host, port=port, reload=False)


@app.command()
def enroll(config: Optional[str] = typer.Option(None, help="Path to a YAML config file")):
    """Capture one face from the camera and store it as the enrolled template."""
    vec = _run_one_shot(config, "enroll")
    typer.echo(f"Face registered and saved ({vec.size} features)")


@app.command()
def authenticate(config: Optional[str] = typer.Option(None, help="Path to a YAML config file")):
    """Capture one face and compare it with the enrolled template."""
    res = _run_one_shot(config, "authenticate")
    typer.echo(f"Cosine similarity: {res.score:.4f}")
    if res.accepted:
        typer.echo("Face authenticated")
    else:
        typer.echo("Authentication failed")
        raise typer.Exit(code=2)


@app.command()
def clear(config: Optional[str] = typer.Option(None, help="Path to a YAML config file")):
    """Remove the enrolled template."""
    cfg = load_config(config)
    store = TemplateStore(cfg.paths.db_path, cfg.paths.template_slot)
    try:
        removed = store.clear()
    finally:
        store.close()
    typer.echo("Enrolled template removed" if removed else "No enrolled template")


@app.command("fetch-model")
def fetch_model(config: Optional[str] = typer.Option(None, help="Path to a YAML config file")):
    """Download the face landmarker model if it is missing."""
    cfg = load_config(config)
    setup_logging(cfg.log_level)
    try:
        path = ensure_model(cfg.detector.model_path, cfg.detector.model_url)
    except FaceAuthError as e:
        typer.echo(f"{type(e).__name__}: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Model ready at {path}")


if __name__ == "__main__":
    app()
