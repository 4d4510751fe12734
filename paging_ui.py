import logging
import math

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.reactive import reactive
from textual.widgets import Button, Footer, Input, Label, RichLog, Static
from textual_plotext import PlotextPlot

from paging_model import (
    DEFAULT_FRAMES,
    DEFAULT_PAGES,
    InvalidArgument,
    OutOfRange,
    PagingSimulator,
    format_result,
    initialize,
)

logger = logging.getLogger(__name__)

TABLE_VIEW_LIMIT = 64   # 页表最多绘制的页块数
LARGE_TABLE_WARNING = 1_000_000  # 超过此页数时页表在事件循环中构建，界面会卡顿
HISTORY_LIMIT = 60      # 趋势图保留的数据点数

MSG_INITIALIZED = "Virtual Memory Manager initialized!"
MSG_NOT_INITIALIZED = "Please initialize the Virtual Memory Manager first!"
MSG_BAD_NUMBER = "Please enter whole numbers."


class StatCard(Static):
    """
    统计卡片组件

    显示缺页率、命中数、缺页数和最近一次访问状态
    """
    def compose(self) -> ComposeResult:
        yield Label("PAGING", classes="card-title")
        yield Label("0.0%", classes="card-rate")
        yield Label("H: 0  F: 0", classes="card-counts")
        yield Label("--", classes="card-status")

    def update_data(self, fault_rate: float, hits: int, faults: int, status: str):
        """更新卡片数据"""
        self.query_one(".card-rate").update(f"{fault_rate:.1f}%")
        self.query_one(".card-counts").update(f"H: {hits}  F: {faults}")

        status_lbl = self.query_one(".card-status")
        status_lbl.update(status)
        status_lbl.classes = "card-status status-fault" if status == "Fault" else "card-status status-hit"

    def reset(self):
        self.update_data(0.0, 0, 0, "--")


class PageBlock(Static):
    """
    页表项组件

    根据页表快照渲染：页号、所在帧号、状态
    """
    page_idx = reactive("0")
    frame_num = reactive("--")
    meta_info = reactive("")

    def compose(self) -> ComposeResult:
        yield Label(f"#{self.page_idx}", classes="page-idx")
        yield Label(self.frame_num, classes="page-frame")
        yield Label(self.meta_info, classes="page-meta")

    def update_state(self, data: dict, is_last: bool):
        """
        根据逻辑层数据更新视图

        Args:
            data: get_snapshot() 中的一项
            is_last: 是否为最近一次访问的页
        """
        self.query_one(".page-idx").update(f"#{data['page']}")
        self.classes = ""

        if not data["valid"]:
            self.query_one(".page-frame").update("--")
            self.query_one(".page-meta").update("UNMAPPED")
            self.add_class("block-empty")
        else:
            self.query_one(".page-frame").update(f"Fr {data['frame']}")
            self.query_one(".page-meta").update("SHARED" if data["aliased"] else "MAPPED")
            self.add_class("block-active")
            if data["aliased"]:
                self.add_class("block-aliased")

        if is_last:
            self.add_class("block-last")


class PagingApp(App):
    """虚拟内存管理器 TUI 应用"""
    CSS_PATH = "styles.tcss"

    BINDINGS = [
        # 整数输入框不接受字母，r/q 始终由应用处理
        Binding("r", "reset", "Reset", priority=True),
        ("ctrl+c", "quit", "Quit"),
        Binding("q", "quit", "Quit", priority=True)
    ]

    def __init__(self):
        super().__init__()
        self.simulator = None
        self.last_output = ""
        self.last_page = None
        self.page_block_refs = []
        self.plot_data_x = []
        self.plot_data_y = []

    def compose(self) -> ComposeResult:
        yield Label("Virtual Memory Manager", classes="app-title")

        with Container(id="stats-panel"):
            yield StatCard(id="card-paging")

        with Container(id="controls-panel"):
            with Container(id="init-row", classes="group-box"):
                yield Label("Number of Pages:")
                yield Input(value=str(DEFAULT_PAGES), type="integer", id="input-pages")
                yield Label("Number of Frames:")
                yield Input(value=str(DEFAULT_FRAMES), type="integer", id="input-frames")
                yield Button("Initialize", id="btn-init", variant="primary")

            with Container(id="access-row", classes="group-box"):
                yield Label("Virtual Page to Access:")
                yield Input(placeholder="0", type="integer", id="input-page")
                yield Button("Access Page", id="btn-access", variant="success")

            yield Label("", id="output")

        with Container(id="log-panel"):
            with Container(id="chart-container"):
                yield PlotextPlot(id="fault-chart-plot")
            yield RichLog(id="sys-log", markup=True, wrap=True)

        yield Container(id="table-panel")
        yield Footer()

    def on_mount(self):
        self.query_one("#sys-log").write("System Ready. Enter pages and frames, then Initialize.")
        self.init_chart()

    def init_chart(self):
        plt = self.query_one("#fault-chart-plot", PlotextPlot).plt
        plt.title("Fault Rate Trend")
        plt.theme("pro")
        plt.xlabel("")
        plt.ylabel("Fault %")
        plt.ylim(0, 100)

    async def on_button_pressed(self, event: Button.Pressed):
        """处理按钮点击事件"""
        bid = event.button.id
        if bid == "btn-init":
            await self.initialize_from_inputs()
        elif bid == "btn-access":
            self.access_from_input()

    async def on_input_submitted(self, event: Input.Submitted):
        """回车提交：页数/帧数输入框初始化，页号输入框访问"""
        if event.input.id in ("input-pages", "input-frames"):
            await self.initialize_from_inputs()
        elif event.input.id == "input-page":
            self.access_from_input()

    def show_output(self, text: str, markup_color: str = ""):
        """更新输出行，并同步写入日志"""
        self.last_output = text
        self.query_one("#output", Label).update(text)
        if markup_color:
            self.query_one("#sys-log").write(f"[{markup_color}]{text}[/]")

    async def initialize_from_inputs(self):
        try:
            pages = int(self.query_one("#input-pages", Input).value)
            frames = int(self.query_one("#input-frames", Input).value)
        except ValueError:
            self.show_output(MSG_BAD_NUMBER, "red")
            return
        await self.start_simulator(pages, frames)

    async def start_simulator(self, pages: int, frames: int):
        """构建新的模拟器并重建页表视图"""
        if pages > LARGE_TABLE_WARNING:
            logger.warning("Building a %d-entry page table, the UI may freeze", pages)
            self.query_one("#sys-log").write(f"[yellow]Building {pages} page table entries, this may take a while[/]")
        try:
            simulator = initialize(pages, frames)
        except InvalidArgument as e:
            logger.warning("Rejected initialization: %s", e)
            self.show_output(str(e), "red")
            return

        self.simulator = simulator
        self.last_page = None
        await self.rebuild_table(simulator)
        self.reset_views()
        self.show_output(MSG_INITIALIZED, "bold green")
        self.query_one("#sys-log").write(f"{pages} pages, {frames} frames")
        if pages > TABLE_VIEW_LIMIT:
            self.query_one("#sys-log").write(f"[yellow]Page table view shows the first {TABLE_VIEW_LIMIT} pages[/]")

    def access_from_input(self):
        if self.simulator is None:
            self.show_output(MSG_NOT_INITIALIZED, "yellow")
            return
        try:
            page = int(self.query_one("#input-page", Input).value)
        except ValueError:
            self.show_output(MSG_BAD_NUMBER, "red")
            return
        self.access_page(page)

    def access_page(self, page: int):
        """执行一次页访问并更新界面"""
        try:
            result = self.simulator.access(page)
        except OutOfRange as e:
            self.show_output(str(e), "red")
            return

        self.last_page = page
        self.show_output(format_result(result))

        status_str = "[green]HIT  [/]" if result.is_hit else "[red]FAULT[/]"
        self.query_one("#sys-log").write(
            f"{status_str} │ [cyan]Pg:{page:>3}[/] → [green]Fr:{result.frame}[/]"
        )

        sim = self.simulator
        self.query_one("#card-paging", StatCard).update_data(
            sim.fault_rate, sim.hit_count, sim.fault_count, result.status
        )

        self.plot_data_x.append(sim.total_count)
        self.plot_data_y.append(sim.fault_rate)
        # 限制数据长度，防止无限增长
        if len(self.plot_data_x) > HISTORY_LIMIT:
            self.plot_data_x.pop(0)
            self.plot_data_y.pop(0)
        self.refresh_chart()
        self.refresh_table()

    async def rebuild_table(self, simulator: PagingSimulator):
        """重建页表块"""
        count = min(simulator.page_count, TABLE_VIEW_LIMIT)
        panel = self.query_one("#table-panel")
        await panel.remove_children()
        self.page_block_refs = [PageBlock() for _ in range(count)]
        await panel.mount(*self.page_block_refs)
        self.update_table_grid_layout(count)
        self.refresh_table()

    def update_table_grid_layout(self, count):
        cols = 4 if count <= 16 else 8
        rows = math.ceil(count / cols)
        panel = self.query_one("#table-panel")
        panel.styles.grid_size_columns = cols
        panel.styles.grid_size_rows = rows

    def refresh_table(self):
        if self.simulator is None:
            return
        snapshot = self.simulator.get_snapshot()
        for block, data in zip(self.page_block_refs, snapshot):
            block.update_state(data, data["page"] == self.last_page)

    def refresh_chart(self):
        """刷新缺页率趋势图"""
        plot_widget = self.query_one("#fault-chart-plot", PlotextPlot)
        plt = plot_widget.plt
        plt.clear_data()
        if self.plot_data_x:
            plt.plot(self.plot_data_x, self.plot_data_y, color="red", marker="dot")
        plot_widget.refresh()

    def reset_views(self):
        """重置统计卡片和趋势图"""
        self.plot_data_x = []
        self.plot_data_y = []
        self.refresh_chart()
        self.query_one("#card-paging", StatCard).reset()

    async def action_reset(self):
        """响应 'r' 键：按当前参数重新初始化"""
        if self.simulator is None:
            self.show_output(MSG_NOT_INITIALIZED, "yellow")
            return
        await self.start_simulator(self.simulator.page_count, self.simulator.frame_count)
        self.query_one("#sys-log").write("[bold red]System Reset.[/]")
