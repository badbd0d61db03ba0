"""Prompt assembly for the generation stage."""

from .assembler import DEFAULT_IMAGE_PROMPT, DEFAULT_INSTRUCTION, assemble_parts

__all__ = ["DEFAULT_IMAGE_PROMPT", "DEFAULT_INSTRUCTION", "assemble_parts"]
