from datetime import datetime

import pytest

from callcore.records import Outcome, StructuralError
from callcore.source_chat import ChatCsvParser, detect_delimiter


def test_detect_delimiter():
    assert detect_delimiter("Id;OpenDate;Team") == ";"
    assert detect_delimiter("Id,OpenDate,Team") == ","


def test_chat_rows(chat_text):
    result = ChatCsvParser().parse(chat_text, filename="novobotdralis.csv")
    first, canceled = result.records

    assert first.id == "t1"
    assert first.channel == "chat"
    assert first.queue == "Suporte"
    assert first.started_at == datetime(2025, 10, 1, 8, 30)
    assert first.outcome == Outcome.ANSWERED
    assert first.wait_seconds == 60
    assert first.handle_seconds == 240
    assert first.operator == "Ana"

    assert canceled.started_at == datetime(2025, 10, 2, 14, 10)
    assert canceled.outcome == Outcome.ABANDONED
    assert canceled.operator is None


def test_undated_and_duplicate_rows_dropped(chat_text):
    result = ChatCsvParser().parse(chat_text)
    assert result.diagnostics.skipped_rows == 2
    assert result.diagnostics.unparsed_fields >= 1


def test_comma_delimited_bytes_with_bom():
    text = "\ufeffOpenDate,Team,Status,QueueTime,OperationalTime,AgentName\n2025-10-05 10:00:00,,Closed,00:00:10,00:01:00,Caio\n"
    result = ChatCsvParser().parse(text.encode("utf-8"))
    (record,) = result.records
    assert record.id == "chat-0"
    assert record.queue == "Unknown"
    assert record.operator == "Caio"


def test_missing_date_column():
    with pytest.raises(StructuralError, match="date column not found"):
        ChatCsvParser().parse("Team;Status\nSuporte;Closed\n")


def test_empty_text():
    with pytest.raises(StructuralError, match="file is empty"):
        ChatCsvParser().parse("\n  \n")


def test_all_rows_undated():
    with pytest.raises(StructuralError, match="no valid rows found"):
        ChatCsvParser().parse("OpenDate;Team\nsoon;Suporte\n")


def test_fractional_clock_seconds_are_floored():
    text = "OpenDate;Team;Status;QueueTime;OperationalTime\n2025-10-01 08:30;Suporte;Closed;00:00:59.6;0d 00:04:00.900\n"
    (record,) = ChatCsvParser().parse(text).records
    assert record.wait_seconds == 59
    assert record.handle_seconds == 240


def test_malformed_line_count_does_not_leak_between_parses():
    parser = ChatCsvParser()
    bad = "OpenDate;Team\n2025-10-01 08:30;Suporte\n2025-10-01 09:00;Suporte;extra;fields\n"
    good = "OpenDate;Team\n2025-10-01 08:30;Suporte\n"
    assert parser.parse(bad).diagnostics.skipped_rows == 1
    assert parser.parse(good).diagnostics.skipped_rows == 0
