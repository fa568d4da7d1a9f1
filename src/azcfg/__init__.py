"""azcfg — protected-region template editing and AutoGen generation for STM32 Azure RTOS."""

__version__ = "0.1.0"
