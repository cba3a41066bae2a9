"""Retrieval-augmented generation: chunking, stores, providers, retrieval and answers."""
