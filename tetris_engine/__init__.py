"""Falling-block puzzle engine with a pygame host."""
