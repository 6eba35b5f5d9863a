"""HTTP service: upload a PDF, apply edit instructions, download the result."""
