"""Reverse proxy that rewrites upstream hostnames to the hostname the client connected to."""
