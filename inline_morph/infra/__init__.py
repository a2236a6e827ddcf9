"""与 Flask 运行时对接的基础设施."""
