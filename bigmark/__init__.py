"""Lottery strategy assembly and award dispatch."""
