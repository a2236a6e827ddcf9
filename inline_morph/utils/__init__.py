"""通用工具函数."""
