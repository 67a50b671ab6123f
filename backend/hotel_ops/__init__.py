"""
酒店运营分析引擎
房价解析、入住率与营收统计
"""
__version__ = "1.0.0"
