import logging
import json
import datetime


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.
    Sensitive keys are redacted recursively from structured messages.
    """

    SENSITIVE_KEYS = {
        'password', 'token', 'access', 'authorization',
        'secret', 'card_number', 'cvv', 'signature', 'cookie',
    }

    # Extra attributes copied onto the record when present
    CONTEXT_FIELDS = ('order_id', 'user_id', 'product_id', 'method', 'path', 'status', 'duration_ms')

    def _scrub(self, data):
        if isinstance(data, dict):
            return {
                k: '***REDACTED***' if str(k).lower() in self.SENSITIVE_KEYS else self._scrub(v)
                for k, v in data.items()
            }
        if isinstance(data, (list, tuple)):
            return [self._scrub(i) for i in data]
        return data

    def format(self, record):
        if isinstance(record.msg, dict):
            record.msg = self._scrub(record.msg)
        if isinstance(record.args, dict):
            record.args = self._scrub(record.args)

        log_record = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "lvl": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
            "line": record.lineno,
        }

        for field in self.CONTEXT_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)

        if record.exc_info:
            log_record['exc'] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)
