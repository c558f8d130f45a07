import configparser


class Parser(configparser.RawConfigParser):
    """Reader for my.cnf style option files.

    Options without a value (``skip-slave-start``) are accepted and values
    wrapped in quotes are returned without them.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault('allow_no_value', True)
        kwargs.setdefault('strict', False)
        configparser.RawConfigParser.__init__(self, **kwargs)

    def __remove_quotes(self, value):
        quotes = ["'", "\""]
        for quote in quotes:
            if len(value) >= 2 and value[0] == value[-1] == quote:
                return value[1:-1]
        return value

    def optionxform(self, key):
        return key.lower().replace('_', '-')

    def get(self, section, option, **kwargs):
        value = configparser.RawConfigParser.get(self, section, option, **kwargs)
        if not isinstance(value, str):
            return value
        return self.__remove_quotes(value)
