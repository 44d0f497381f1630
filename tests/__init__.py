"""Test package for pkgretire."""
