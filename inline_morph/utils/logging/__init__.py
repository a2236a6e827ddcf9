"""结构化日志的共享组件."""
