"""
Core application engine for orchestrating a conversion run.

The `ConversionManager` coordinates the run: the `JobBuilder` turns manifest
records into jobs, the `BatchOrchestrator` spreads them over worker threads,
and the `ProcessInvoker` runs each one through the encoder.
"""
