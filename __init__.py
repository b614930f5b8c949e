"""
AstrBot Drawio2Image 插件包
"""
