#!/usr/bin/env python3
"""Generate a single validated RSA key pair for development."""

import sys
import os

# Add the current directory to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from python_tokenpair.crypto.keypair import KeyPairGenerator
from python_tokenpair.errors import TokenPairError


def main(argv=None):
    """Generate and display one key pair with its passphrase."""
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) > 1:
        print("Usage: python scripts/gen_keys.py [modulus-length]", file=sys.stderr)
        print("Example: python scripts/gen_keys.py 4096", file=sys.stderr)
        return 1
    
    try:
        modulus_length = int(argv[0]) if argv else 2048
    except ValueError:
        print(f"Invalid modulus length: {argv[0]}", file=sys.stderr)
        return 1
    
    print(f"Generating RSA-{modulus_length} key pair...")
    
    try:
        pair = KeyPairGenerator().generate("access", modulus_length)
    except TokenPairError as e:
        print(f"Error generating keys: {e}", file=sys.stderr)
        return 1
    
    print("\n=== PUBLIC KEY ===")
    print(pair.public_key)
    print("\n=== ENCRYPTED PRIVATE KEY ===")
    print(pair.private_key)
    print("\n=== PASSPHRASE ===")
    print(pair.passphrase)
    
    print("\nKey pair generated and validated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
