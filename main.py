#!/usr/bin/env python3
"""
Main entry point for the FKS trading client
"""
from fks_client.cli import run

if __name__ == '__main__':
    run()
