"""Command line entry point for generating token key pairs."""

import argparse
import sys
from typing import List, Optional
from python_tokenpair.config.config import Config, parse_mode, parse_modulus
from python_tokenpair.errors import TokenPairError
from python_tokenpair.models import ProvisioningResult
from python_tokenpair.provision.events import PrintEventSink
from python_tokenpair.provision.orchestrator import ProvisioningOrchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="generate-token",
        description="Generate RSA token key pairs for access and refresh tokens",
    )
    parser.add_argument("--config", help="YAML config file to read defaults from")
    parser.add_argument("--key-dir", dest="key_dir", help="Directory where keys will be stored")
    parser.add_argument("--env-file", dest="env_file", help="Environment file to update")
    parser.add_argument("--permissions", help="File permissions in octal (e.g. 600)")
    parser.add_argument("--modulus", help="RSA modulus length (2048 or 4096)")
    parser.add_argument(
        "--log",
        choices=PrintEventSink.LEVELS,
        help="Logging level (minimal shows warnings and errors, all shows every stage)",
    )
    return parser


def load_config(args: argparse.Namespace) -> Config:
    """Apply CLI options on top of file and environment configuration."""
    config = Config.load(args.config)
    if args.key_dir:
        config.key_directory = args.key_dir
    if args.env_file:
        config.env_file = args.env_file
    if args.permissions:
        config.file_permissions = parse_mode(args.permissions)
    if args.modulus:
        config.modulus_length = parse_modulus(args.modulus)
    if args.log:
        config.log_level = args.log
    return config


def print_security_notes(result: ProvisioningResult, key_dir: str):
    """Print post-run guidance for handling the generated keys."""
    print("Keys have been generated and stored successfully")
    print()
    print("Security Notes:")
    print(f"1. Key files have been generated in '{result.key_directory}'")
    print(f"2. Both file paths and actual keys are stored in '{result.env_file}'")
    print("3. Access and Refresh token key pairs have been generated.")
    print("4. Ensure your .gitignore includes:")
    print(f"   - {result.env_file}")
    print(f"   - {key_dir}/")
    print("5. Consider moving keys to a secure key management service for production.")
    print("6. Backup these keys securely and never commit them to version control.")
    print("7. Previous environment variables have been preserved.")
    print()
    print("Note: If you see any permission warnings, consider manually restricting "
          f"file permissions using: chmod 600 {result.key_directory}/*.pem")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the generator and return a process exit code."""
    args = build_parser().parse_args(argv)
    
    try:
        config = load_config(args)
        provisioning_config = config.provisioning_config()
        sink = PrintEventSink(config.log_level)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    
    try:
        result = ProvisioningOrchestrator(provisioning_config, sink=sink).provision()
    except TokenPairError as e:
        print(f"Error during key generation: {e}", file=sys.stderr)
        return 1
    
    print_security_notes(result, config.key_directory)
    return 0


if __name__ == "__main__":
    sys.exit(main())
