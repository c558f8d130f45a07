#!/usr/bin/env python
import logging
import sys

from tornado.ioloop import IOLoop

import tornado_binlog
from tornado_binlog import EVENT_TYPE


def print_event(packet):
    header = tornado_binlog.read_event_header(packet)
    if header is None:
        print(f"short packet: {packet!r}")
        return
    print(f"{EVENT_TYPE.event_type_name(header.event_type):<28} "
          f"server_id={header.server_id} log_pos={header.log_pos} "
          f"size={header.event_size}")


async def main(host="127.0.0.1", port=3306, user="root", password=""):
    try:
        conn = await tornado_binlog.connect(
            host=host, port=port, user=user, password=password,
            slave_id=1001, heartbeat_period=30, on_event=print_event)
    except tornado_binlog.Error as e:
        print(f"Error starting replication: {e}")
        return 1

    print(f"Streaming from {conn.get_server_info()} ({conn.host_info})")
    try:
        await conn.wait_closed()
    except tornado_binlog.Error as e:
        print(f"Replication stopped: {e}")
        return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(IOLoop.current().run_sync(main))
