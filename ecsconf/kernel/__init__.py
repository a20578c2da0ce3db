"""Kernel: configuration models, errors, logging and version gating.

The kernel never reads files or evaluates templates; that is the
compiler's job (see ``ecsconf.compiler``).
"""
