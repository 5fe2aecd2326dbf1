"""Structured JSON logging with context propagation, field masking and rotating file output."""