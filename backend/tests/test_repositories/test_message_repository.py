"""
Unit tests for MessageRepository (mocked connections)
"""
import pytest
from unittest.mock import patch
from datetime import datetime

from psycopg2.errors import UniqueViolation

from gamestore.repositories.message_repository import MessageRepository


@pytest.fixture
def message_row():
    return {
        'id': 4,
        'message_number': 'MSG-2025-0004',
        'name': 'Sara',
        'email': 'sara@example.com',
        'phone': None,
        'subject': 'Pre-order question',
        'message': 'Is the collector edition still available?',
        'category': None,
        'priority': None,
        'status': 'unread',
        'is_read': False,
        'read_at': None,
        'replied_at': None,
        'resolved_at': None,
        'admin_notes': None,
        'reply': None,
        'created_at': datetime(2025, 5, 1, 8, 0),
        'updated_at': None,
    }


@pytest.fixture
def message_data():
    return {
        'name': 'Sara',
        'email': 'sara@example.com',
        'subject': 'Pre-order question',
        'message': 'Is the collector edition still available?',
    }


class TestMessageRepositoryCreate:

    @patch('gamestore.repositories.message_repository.get_db_connection_dict')
    def test_create_numbers_message(self, mock_get_conn, mock_db, message_row, message_data):
        # Arrange
        conn, cursor = mock_db
        mock_get_conn.return_value = conn
        cursor.fetchone.side_effect = [{'last_seq': 3}, message_row]

        # Act
        message = MessageRepository().create(message_data)

        # Assert
        year = datetime.now().year
        assert cursor.execute.call_args_list[0][0][1] == (f"MSG-{year}-%",)
        insert_params = cursor.execute.call_args_list[1][0][1]
        assert insert_params[0] == f"MSG-{year}-0004"
        # Category and priority fall back to their defaults
        assert insert_params[-2:] == ('general', 'medium')

        assert message.category == 'general'
        assert message.priority == 'medium'
        assert message.is_read is False
        conn.commit.assert_called_once()

    @patch('gamestore.repositories.message_repository.get_db_connection_dict')
    def test_create_retries_on_number_collision(self, mock_get_conn, mock_db, message_row, message_data):
        # Arrange
        conn, cursor = mock_db
        mock_get_conn.return_value = conn
        cursor.execute.side_effect = [None, UniqueViolation(), None, None]
        cursor.fetchone.side_effect = [{'last_seq': 3}, {'last_seq': 4}, message_row]

        # Act
        MessageRepository().create(message_data)

        # Assert
        assert cursor.execute.call_args_list[3][0][1][0].endswith("-0005")
        conn.rollback.assert_called_once()
        conn.commit.assert_called_once()


class TestMessageRepositoryUpdates:

    @patch('gamestore.repositories.message_repository.get_db_connection_dict')
    def test_find_all_filters(self, mock_get_conn, mock_db, message_row):
        # Arrange
        conn, cursor = mock_db
        mock_get_conn.return_value = conn
        cursor.fetchone.return_value = {'total': 1}
        cursor.fetchall.return_value = [message_row]

        # Act
        messages, total = MessageRepository().find_all(search='edition', priority='high', limit=20)

        # Assert
        count_sql, params = cursor.execute.call_args_list[0][0]
        assert "priority = %s" in count_sql
        assert params == ['%edition%'] * 5 + ['high']
        assert cursor.execute.call_args_list[1][0][1][-2:] == [20, 0]
        assert total == 1
        assert messages[0].message_number == 'MSG-2025-0004'

    @patch('gamestore.repositories.message_repository.get_db_connection_dict')
    def test_mark_as_read_keeps_other_statuses(self, mock_get_conn, mock_db, message_row):
        # Arrange
        conn, cursor = mock_db
        mock_get_conn.return_value = conn
        cursor.fetchone.return_value = {**message_row, 'status': 'read', 'is_read': True, 'read_at': datetime.now()}

        # Act
        message = MessageRepository().mark_as_read(4)

        # Assert
        sql, params = cursor.execute.call_args[0]
        assert "CASE WHEN status = 'unread' THEN 'read' ELSE status END" in sql
        assert "COALESCE(read_at, NOW())" in sql
        assert params == [4]
        assert message.is_read is True

    @patch('gamestore.repositories.message_repository.get_db_connection_dict')
    def test_add_reply_sets_replied_status(self, mock_get_conn, mock_db, message_row):
        # Arrange
        conn, cursor = mock_db
        mock_get_conn.return_value = conn
        cursor.fetchone.return_value = {**message_row, 'status': 'replied', 'reply': 'Yes, in stock.'}

        # Act
        message = MessageRepository().add_reply(4, 'Yes, in stock.')

        # Assert
        sql, params = cursor.execute.call_args[0]
        assert "status = 'replied'" in sql
        assert params == ['Yes, in stock.', 4]
        assert message.reply == 'Yes, in stock.'
        conn.commit.assert_called_once()

    @patch('gamestore.repositories.message_repository.get_db_connection_dict')
    def test_update_status_missing_message(self, mock_get_conn, mock_db):
        # Arrange
        conn, cursor = mock_db
        mock_get_conn.return_value = conn
        cursor.fetchone.return_value = None

        # Act
        message = MessageRepository().update_status(99, 'resolved')

        # Assert
        assert message is None
        assert cursor.execute.call_args[0][1] == ['resolved'] * 4 + [99]
