#!/usr/bin/env python3
"""
gen_go.py - Go binding generator entry point

Generates the cgo wrapper file for libclang from a header IR dump.

Usage:
    python scripts/gen_go.py [--ir PATH] [--output PATH] [--package NAME]
"""

import argparse
import os
import sys

# Get paths
script_dir = os.path.dirname(os.path.abspath(__file__))
root_dir = os.path.abspath(os.path.join(script_dir, '..'))

# Add scripts directory to path
sys.path.insert(0, script_dir)

from cgobind import Generator, ExtractionError, NamingError
from bindings import clang


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate Go bindings')
    parser.add_argument('--ir', default=os.path.join(root_dir, 'gen/ir/clang.json'),
                        help='Path to the header IR (JSON)')
    parser.add_argument('--output', default=os.path.join(root_dir, 'clang_gen.go'),
                        help='Path of the generated Go file')
    parser.add_argument('--package', default='clang',
                        help='Go package name of the generated file')
    return parser.parse_args(argv)


def generate_clang(args):
    """Generate libclang bindings"""
    gen = Generator(
        ir_path=args.ir,
        output_path=args.output,
        package=args.package,
    )

    # Apply libclang-specific configuration
    clang.configure(gen)

    gen.generate()


def main(argv=None):
    args = parse_args(argv)
    try:
        generate_clang(args)
    except (ExtractionError, NamingError) as exc:
        raise SystemExit(f'error: {exc}') from exc


if __name__ == '__main__':
    main()
