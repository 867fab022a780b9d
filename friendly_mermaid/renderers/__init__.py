"""Renderer backends for compiled Mermaid text."""
