"""
Knowledge Assistant Package.

Backend for an AI chat assistant: conversation and message storage, a
knowledge base with hybrid (semantic + keyword) search over SQLite, and
services wiring both to OpenAI completions and embeddings.
"""

__version__ = "1.0.0"
