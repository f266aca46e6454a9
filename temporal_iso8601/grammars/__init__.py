"""ABNF grammars."""
