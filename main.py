"""
虚拟内存管理器 - 主程序入口

按需分页模拟：输入虚拟页数和物理帧数初始化页表，
再逐个访问虚拟页，显示命中 (Hit) 或缺页 (Fault)。
帧按轮转方式分配，没有页面置换。

使用方法:
    uv run main.py
    或
    python main.py
"""
import logging

from textual.logging import TextualHandler

from paging_ui import PagingApp


def main():
    # 日志转发到 textual 控制台 (textual console)
    logging.basicConfig(level="DEBUG", handlers=[TextualHandler()])
    app = PagingApp()
    app.run()


if __name__ == "__main__":
    main()
