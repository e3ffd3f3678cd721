"""Taskboard: multi-tenant project and task management backend."""
