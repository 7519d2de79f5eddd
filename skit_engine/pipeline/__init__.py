from skit_engine.pipeline.orchestrator import generate_script

__all__ = ["generate_script"]
