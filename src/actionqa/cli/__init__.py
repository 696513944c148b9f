"""ActionQA command-line interface."""
