from .dates import combine, iter_dates, parse_date, parse_datetime, parse_time, weekday_name

__all__ = ["combine", "iter_dates", "parse_date", "parse_datetime", "parse_time", "weekday_name"]
