"""Canonical Torznab/Newznab category taxonomy.

The table is fixed and process-wide. Parent/child relations are derived
from the thousand range an id falls into, so ``5070`` (TV/Anime) has the
parent ``5000`` (TV).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

CUSTOM_CATEGORY_OFFSET = 100000


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    description: str = ""

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


OTHER = Category(0, "Other")
OTHER_MISC = Category(10, "Other/Misc")
OTHER_HASHED = Category(20, "Other/Hashed")
CONSOLE = Category(1000, "Console")
CONSOLE_NDS = Category(1010, "Console/NDS")
CONSOLE_PSP = Category(1020, "Console/PSP")
CONSOLE_WII = Category(1030, "Console/Wii")
CONSOLE_XBOX = Category(1040, "Console/Xbox")
CONSOLE_XBOX360 = Category(1050, "Console/Xbox360")
CONSOLE_WIIWARE_VC = Category(1060, "Console/Wiiware/V")
CONSOLE_XBOX360_DLC = Category(1070, "Console/Xbox360 DLC")
CONSOLE_PS3 = Category(1080, "Console/PS3")
CONSOLE_OTHER = Category(1999, "Console/Other")
CONSOLE_3DS = Category(1110, "Console/3DS")
CONSOLE_PSVITA = Category(1120, "Console/PS Vita")
CONSOLE_WIIU = Category(1130, "Console/WiiU")
CONSOLE_XBOXONE = Category(1140, "Console/XboxOne")
CONSOLE_PS4 = Category(1180, "Console/PS4")
MOVIES = Category(2000, "Movies")
MOVIES_FOREIGN = Category(2010, "Movies/Foreign")
MOVIES_OTHER = Category(2020, "Movies/Other")
MOVIES_SD = Category(2030, "Movies/SD")
MOVIES_HD = Category(2040, "Movies/HD")
MOVIES_3D = Category(2050, "Movies/3D")
MOVIES_BLURAY = Category(2060, "Movies/BluRay")
MOVIES_DVD = Category(2070, "Movies/DVD")
MOVIES_WEBDL = Category(2080, "Movies/WEBDL")
AUDIO = Category(3000, "Audio")
AUDIO_MP3 = Category(3010, "Audio/MP3")
AUDIO_VIDEO = Category(3020, "Audio/Video")
AUDIO_AUDIOBOOK = Category(3030, "Audio/Audiobook")
AUDIO_LOSSLESS = Category(3040, "Audio/Lossless")
AUDIO_OTHER = Category(3999, "Audio/Other")
AUDIO_FOREIGN = Category(3060, "Audio/Foreign")
PC = Category(4000, "PC")
PC_0DAY = Category(4010, "PC/0day")
PC_ISO = Category(4020, "PC/ISO")
PC_MAC = Category(4030, "PC/Mac")
PC_PHONE_OTHER = Category(4040, "PC/Phone-Other")
PC_GAMES = Category(4050, "PC/Games")
PC_PHONE_IOS = Category(4060, "PC/Phone-IOS")
PC_PHONE_ANDROID = Category(4070, "PC/Phone-Android")
TV = Category(5000, "TV")
TV_WEBDL = Category(5010, "TV/WEB-DL")
TV_FOREIGN = Category(5020, "TV/Foreign")
TV_SD = Category(5030, "TV/SD")
TV_HD = Category(5040, "TV/HD")
TV_OTHER = Category(5999, "TV/Other")
TV_SPORT = Category(5060, "TV/Sport")
TV_ANIME = Category(5070, "TV/Anime")
TV_DOCUMENTARY = Category(5080, "TV/Documentary")
XXX = Category(6000, "XXX")
XXX_DVD = Category(6010, "XXX/DVD")
XXX_WMV = Category(6020, "XXX/WMV")
XXX_XVID = Category(6030, "XXX/XviD")
XXX_X264 = Category(6040, "XXX/x264")
XXX_OTHER = Category(6999, "XXX/Other")
XXX_IMAGESET = Category(6060, "XXX/Imageset")
XXX_PACKS = Category(6070, "XXX/Packs")
BOOKS = Category(7000, "Books")
BOOKS_MAGAZINES = Category(7010, "Books/Magazines")
BOOKS_EBOOK = Category(7020, "Books/Ebook")
BOOKS_COMICS = Category(7030, "Books/Comics")
BOOKS_TECHNICAL = Category(7040, "Books/Technical")
BOOKS_FOREIGN = Category(7060, "Books/Foreign")
BOOKS_UNKNOWN = Category(7999, "Books/Unknown")

ALL_CATEGORIES: tuple[Category, ...] = (
    OTHER,
    OTHER_MISC,
    OTHER_HASHED,
    CONSOLE,
    CONSOLE_NDS,
    CONSOLE_PSP,
    CONSOLE_WII,
    CONSOLE_XBOX,
    CONSOLE_XBOX360,
    CONSOLE_WIIWARE_VC,
    CONSOLE_XBOX360_DLC,
    CONSOLE_PS3,
    CONSOLE_OTHER,
    CONSOLE_3DS,
    CONSOLE_PSVITA,
    CONSOLE_WIIU,
    CONSOLE_XBOXONE,
    CONSOLE_PS4,
    MOVIES,
    MOVIES_FOREIGN,
    MOVIES_OTHER,
    MOVIES_SD,
    MOVIES_HD,
    MOVIES_3D,
    MOVIES_BLURAY,
    MOVIES_DVD,
    MOVIES_WEBDL,
    AUDIO,
    AUDIO_MP3,
    AUDIO_VIDEO,
    AUDIO_AUDIOBOOK,
    AUDIO_LOSSLESS,
    AUDIO_OTHER,
    AUDIO_FOREIGN,
    PC,
    PC_0DAY,
    PC_ISO,
    PC_MAC,
    PC_PHONE_OTHER,
    PC_GAMES,
    PC_PHONE_IOS,
    PC_PHONE_ANDROID,
    TV,
    TV_WEBDL,
    TV_FOREIGN,
    TV_SD,
    TV_HD,
    TV_OTHER,
    TV_SPORT,
    TV_ANIME,
    TV_DOCUMENTARY,
    XXX,
    XXX_DVD,
    XXX_WMV,
    XXX_XVID,
    XXX_X264,
    XXX_OTHER,
    XXX_IMAGESET,
    XXX_PACKS,
    BOOKS,
    BOOKS_MAGAZINES,
    BOOKS_EBOOK,
    BOOKS_COMICS,
    BOOKS_TECHNICAL,
    BOOKS_FOREIGN,
    BOOKS_UNKNOWN,
)

# Umbrella category per thousand range.
_PARENTS: tuple[Category, ...] = (OTHER, CONSOLE, MOVIES, AUDIO, PC, TV, XXX, BOOKS)


def parent_category(category: Category) -> Category:
    """Return the umbrella category of the range ``category`` belongs to."""
    if category.id < 0 or category.id >= 8000:
        return OTHER
    return _PARENTS[category.id // 1000]


def by_name(name: str) -> Category | None:
    """Exact name lookup; the first entry in taxonomy order wins."""
    for cat in ALL_CATEGORIES:
        if cat.name == name:
            return cat
    return None


def by_id(category_id: int) -> Category | None:
    for cat in ALL_CATEGORIES:
        if cat.id == category_id:
            return cat
    return None


def subset(ids: Iterable[int]) -> list[Category]:
    """Taxonomy categories whose id is in ``ids``, in taxonomy order.

    Unknown ids are silently ignored.
    """
    wanted = set(ids)
    return [cat for cat in ALL_CATEGORIES if cat.id in wanted]


def sorted_by_id(categories: Iterable[Category]) -> list[Category]:
    return sorted(categories, key=lambda c: c.id)
