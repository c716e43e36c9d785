"""Inspectors — turn a PDF or EPUB into facts and XML property reports."""
