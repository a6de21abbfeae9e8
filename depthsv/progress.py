#!/usr/bin/env python3

from tqdm import tqdm


class ProgressMeter(object):
    """
    Reports coarse progress of the event search on stderr
    """
    def __init__(self, disable=False):
        self._bar = tqdm(unit="record", desc="records", disable=disable, leave=False)

    def set_record_label(self, label):
        self._bar.set_description(label, refresh=False)

    def update(self, label):
        self._bar.set_postfix_str(label, refresh=False)
        self._bar.update(1)

    def close(self):
        self._bar.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class NullProgressMeter(object):
    def set_record_label(self, label):
        pass

    def update(self, label):
        pass
