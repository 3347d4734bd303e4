from queue import ShutDown
from threading import Thread

from textual.app import App
from textual.app import ComposeResult
from textual.widgets import DataTable
from textual.widgets import Footer
from textual.widgets import Header

from .coio import Coio
from .driver import Driver
from .result import Err
from .result import Ok


class Monitor(App):
    """TUI for watching routines being driven."""

    TITLE = "coio Monitor"

    def __init__(self):
        super().__init__()
        self.__coio = Coio()
        self.__thread = Thread(target=self.__listen, name="coio-monitor")
        self.__events = self.__coio.subscribe(
            {
                Driver.Started,
                Driver.Suspended,
                Driver.Continued,
                Driver.Threw,
                Driver.Completed,
            }
        )

    def __listen(self):
        while True:
            try:
                event = self.__events.get()
            except ShutDown:
                break

            self.call_from_thread(self.handle_driver_event, event)

    def handle_driver_event(
        self,
        event: Driver.Started
        | Driver.Suspended
        | Driver.Continued
        | Driver.Threw
        | Driver.Completed,
    ):
        table = self.query_one(DataTable)
        status = self.__column_keys[3]
        match event:
            case Driver.Started():
                table.add_row(
                    event.id,
                    event.name,
                    event.parent_id or "",
                    "Started",
                    "",
                    key=event.id,
                )
            case Driver.Suspended():
                table.update_cell(event.id, status, "Suspended")
                table.update_cell(event.id, self.__column_keys[4], event.kind)
            case Driver.Continued():
                table.update_cell(event.id, status, "Continued")
            case Driver.Threw():
                table.update_cell(event.id, status, "Threw")
            case Driver.Completed(result=Ok()):
                table.update_cell(event.id, status, "Succeeded")
            case Driver.Completed(result=Err()):
                table.update_cell(event.id, status, "Errored")

    def compose(self) -> ComposeResult:
        yield Header()
        yield DataTable(cursor_type="row", zebra_stripes=True)
        yield Footer()

    def on_mount(self):
        table = self.query_one(DataTable)
        self.__column_keys = table.add_columns(
            "ID", "Name", "Parent", "Status", "Waiting on"
        )
        self.__thread.start()

    def on_unmount(self) -> None:
        self.__coio.shutdown()
        self.__thread.join()
