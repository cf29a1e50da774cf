"""Besu BFT genesis builder and Kubernetes artifact exchange."""
