"""
stagehand.integrations - Processes and Script Engines
=======================================================

    - processes:  launching interpreters and parsing their output
    - scripting:  bootstrap rendering and per-platform script engines
"""
