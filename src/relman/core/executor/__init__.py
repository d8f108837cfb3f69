"""Build executors used to verify and perform releases."""

from relman.core.executor.maven import ForkedMavenExecutor, MavenExecutor, MavenExecutorError

__all__ = ["MavenExecutor", "ForkedMavenExecutor", "MavenExecutorError"]
