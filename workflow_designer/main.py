"""Main entry point for the workflow designer service."""

from workflow_designer.config import load_config
from workflow_designer.factory import create_app

config = load_config()
app = create_app(config)


def run():
    """Run the service with uvicorn."""
    import uvicorn
    uvicorn.run("workflow_designer.main:app", **config.get_uvicorn_config())


if __name__ == "__main__":
    run()
