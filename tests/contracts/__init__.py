"""Tests for the contracts package: patches, the node protocol, errors and termination records."""
