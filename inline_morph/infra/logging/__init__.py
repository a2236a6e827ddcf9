"""请求级日志基础设施."""
