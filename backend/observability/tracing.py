import logging
import os
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from typing import Any

logger = logging.getLogger(__name__)


@lru_cache
def get_langfuse_client():
    public_key = os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = os.getenv("LANGFUSE_SECRET_KEY")
    host = os.getenv("LANGFUSE_HOST", "http://localhost:3333")

    if not public_key or not secret_key:
        return None

    try:
        from langfuse import Langfuse

        return Langfuse(public_key=public_key, secret_key=secret_key, host=host)
    except Exception as e:
        logger.warning("Langfuse client unavailable: %s", e)
        return None


class _NullGeneration:
    def update(self, **kwargs):
        pass


@contextmanager
def traced_generation(name: str, *, model: str, prompt=None, input_data=None):
    langfuse = get_langfuse_client()
    if not langfuse:
        yield _NullGeneration()
        return

    try:
        observation = langfuse.start_as_current_observation(
            as_type="generation",
            name=name,
            model=model,
            prompt=prompt,
            input=_safe_serialize(input_data),
        )
        gen = observation.__enter__()
    except Exception:
        yield _NullGeneration()
        return

    try:
        yield gen
    finally:
        try:
            observation.__exit__(None, None, None)
        except Exception:
            pass


class PipelineTrace:
    """Langfuse span around one analysis run; logs locally when Langfuse is off."""

    def __init__(
        self,
        pipeline_name: str,
        user_id: str = "unknown",
        session_id: str | None = None,
        metadata: dict | None = None,
    ):
        self.pipeline_name = pipeline_name
        self.user_id = user_id
        self.session_id = session_id or datetime.now().strftime("%Y%m%d_%H%M%S")
        self.metadata = metadata or {}
        self.start_time: datetime | None = None
        self.langfuse = get_langfuse_client()
        self._span = None
        self.nodes_logged: list[dict] = []

    def __enter__(self):
        self.start_time = datetime.now()

        if self.langfuse:
            try:
                self._span = self.langfuse.start_as_current_span(name=self.pipeline_name)
                self._span.__enter__()
                self.langfuse.update_current_trace(
                    user_id=self.user_id,
                    session_id=self.session_id,
                    metadata={"started_at": self.start_time.isoformat(), **self.metadata},
                )
            except Exception:
                self._span = None

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000
        logger.info(
            "[TRACE] Pipeline '%s' for session %s finished in %.0fms (%d nodes)",
            self.pipeline_name,
            self.session_id,
            duration_ms,
            len(self.nodes_logged),
        )

        if self._span:
            try:
                self.langfuse.update_current_span(
                    output={
                        "status": "ERROR" if exc_type else "OK",
                        "nodes_completed": len(self.nodes_logged),
                        "nodes": self.nodes_logged,
                    },
                )
                self._span.__exit__(exc_type, exc_val, exc_tb)
            except Exception:
                pass

        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception:
                pass

    def log_node(
        self,
        node_name: str,
        output_data: Any,
        duration_ms: float,
        error: str | None = None,
    ):
        self.nodes_logged.append(
            {"node": node_name, "duration_ms": round(duration_ms, 1), "success": error is None}
        )
        status = "ok" if error is None else f"degraded ({error})"
        logger.info("[TRACE] %s: %.0fms %s", node_name, duration_ms, status)

        if not self.langfuse:
            return

        try:
            with self.langfuse.start_as_current_span(name=node_name):
                self.langfuse.update_current_span(
                    output=_safe_serialize(output_data),
                    metadata={"duration_ms": round(duration_ms, 1), "error": error},
                )
        except Exception:
            pass


def _safe_serialize(data: Any) -> Any:
    if data is None:
        return None
    try:
        if hasattr(data, "model_dump"):
            return data.model_dump()
        if isinstance(data, (dict, list, str, int, float, bool)):
            return data
        return str(data)[:500]
    except Exception:
        return str(data)[:500]
