"""Railguard CLI."""
