"""Toolgate core — config, logging, metrics, crypto."""
