"""Railguard core: policy engine, hook protocol, audit log, settings."""
