"""Bundled gateway SDKs, loaded through the script host."""
