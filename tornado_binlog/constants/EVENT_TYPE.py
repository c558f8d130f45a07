# https://dev.mysql.com/doc/internals/en/binlog-event-type.html
UNKNOWN_EVENT = 0x00
START_EVENT_V3 = 0x01
QUERY_EVENT = 0x02
STOP_EVENT = 0x03
ROTATE_EVENT = 0x04
INTVAR_EVENT = 0x05
FORMAT_DESCRIPTION_EVENT = 0x0f
XID_EVENT = 0x10
TABLE_MAP_EVENT = 0x13
HEARTBEAT_EVENT = 0x1b
WRITE_ROWS_EVENT_V2 = 0x1e
UPDATE_ROWS_EVENT_V2 = 0x1f
DELETE_ROWS_EVENT_V2 = 0x20
GTID_LOG_EVENT = 0x21
ANONYMOUS_GTID_LOG_EVENT = 0x22
PREVIOUS_GTIDS_LOG_EVENT = 0x23

# MariaDB
MARIADB_ANNOTATE_ROWS_EVENT = 0xa0
MARIADB_BINLOG_CHECKPOINT_EVENT = 0xa1
MARIADB_GTID_EVENT = 0xa2
MARIADB_GTID_GTID_LIST_EVENT = 0xa3


def event_type_name(event_type):
    for name, value in globals().items():
        if name.isupper() and value == event_type:
            return name
    return 'UNKNOWN_EVENT(%d)' % event_type
