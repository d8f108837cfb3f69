"""Core release orchestration, SCM and build support for Relman."""
