"""A progress sink that renders pipeline milestones on a tqdm bar."""

from tqdm import tqdm

# create database, create tables, get latest, insert tables,
# start/stop transaction, start/stop query
FULL_RUN_MILESTONES = 8


class TqdmProgress:
    """Callable progress sink; each milestone advances the bar by one."""

    def __init__(self, total: int = FULL_RUN_MILESTONES):
        self.bar = tqdm(total=total, unit="step", desc="pouet")
        self.titles = []

    def __call__(self, title: str) -> None:
        self.titles.append(title)
        self.bar.set_description(title)
        self.bar.update(1)

    def close(self):
        self.bar.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
