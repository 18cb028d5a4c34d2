"""
Built-in example songs and the structural-tag cheat sheet.

Read-only reference data for the editor: examples are loaded as starting
templates, the cheat sheet lists the section markers Suno understands.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExampleLyric:
    title: str
    style: str
    tags: tuple[str, ...]
    content: str


@dataclass(frozen=True)
class TagHint:
    label: str
    description: str


EXAMPLE_LYRICS: tuple[ExampleLyric, ...] = (
    ExampleLyric(
        title="数算日子 (古风/感叹)",
        style="Chinese Traditional Instruments, Guzheng, Erhu, Slow, Emotional, 70bpm",
        tags=("Intro", "Verse", "Chorus", "Bridge"),
        content="""\
[Intro]
(古筝琶音, 如時光流逝, 笛子吹出悠遠、蒼涼的主旋律, 鋼琴鋪底)

[Verse 1]
(安靜, 充滿感嘆)
祢是我們 世代的居所
從亙古 到永遠 祢都在
群山未曾 生出
大地未曾 造成
祢是那 永恆的所在
(二胡 旋律進入)

[Pre-Chorus]
(情緒平穩, 帶入畫面)
祢使人歸於 塵土
祢說 世人要歸回
千年 在祢看來
不過像 昨日ㄧ更

[Chorus]
(旋律必須優美、簡單、極度易唱)
(輕柔的鈴鼓 進入)
我們度盡的 年歲
好像 那ㄧ聲嘆息
我們ㄧ生的 誇耀
不過是 轉眼成空
(弦樂 輕輕加入)

[Verse 2]
(保持敘事感, 情感更深)
我們好像 清晨發芽
隨風生長 的草
早晨 發芽生長
晚上 枯乾凋零
(二胡 與 弦樂 交織)

[Pre-Chorus]
祢使人歸於 塵土
祢說 世人要歸回
千年 在祢看來
不過像 昨日ㄧ更

[Chorus] (x2)
我們度盡的 年歲
好像 那ㄧ聲嘆息
我們ㄧ生的 誇耀
不過是 轉眼成空

[Bridge]
(抒情的旋律高峰, 全歌的靈魂)
(鋼琴、二胡、弦乐 推动)
求祢指教我 怎樣數算
我餘下的日子
好叫我 得著那
從祢來 的智慧

[Chorus]
我們度盡的 年歲
好像 那ㄧ聲嘆息
我們ㄧ生的 誇耀
不過是 轉眼成空

[Outro]
(安靜 祷告式, 呼应Intro)
求祢指教我 數算
我餘下的 日子
(音樂淡出)
""",
    ),
    ExampleLyric(
        title="生命的江河 (活泼/宣告)",
        style="Upbeat, Contemporary Worship, Pop Rock, Acoustic Guitar, 95bpm, Bright",
        tags=("Verse", "Pre-Chorus", "Chorus", "Bridge"),
        content="""\
[Intro]
(Upbeat acoustic guitar strumming, cheerful whistle melody)

[Verse 1]
心灵深处有一渴望
如同旷野寻找水源
世界一切无法满足
直到遇见生命泉源

[Pre-Chorus]
你说凡喝这水的
还要再渴还要再渴
但喝你所赐水的
永远不渴永远不渴

[Chorus]
我要奔向你
生命的江河
我要饮于你
永恒的泉源

活水江河从你流出
流进我心最深处
干渴的心得满足
生命更新如雨露

[Verse 2]
不再倚靠破裂池子
不再追求短暂满足
你是源头永不枯竭
你是道路真理生命

[Bridge]
让活水涌流
让活水涌流
在这里在现在
让活水涌流

圣灵的江河
圣灵的江河
充满这地方
圣灵的江河

[Chorus] (x2)
活水江河从你流出
(江河涌流)
流进我心最深处
(最深处)
干渴的心得满足
(得满足)
生命更新如雨露
(如雨露)

[Outro]
让江河涌流
让江河涌流
在全地涌流
直到永远
""",
    ),
    ExampleLyric(
        title="磐石之上 (摇滚/信心)",
        style="Christian Rock, Electric Guitar, Powerful Drums, Male Vocal, Anthem, 110bpm",
        tags=("Verse", "Chorus", "Bridge"),
        content="""\
[Intro]
(Electric guitar riff, powerful drum beat)

[Verse 1]
我的心哪，你为何忧闷
为何在我里面烦躁
应当仰望神 仰望神
因他笑脸帮助我

[Verse 2]
我的神啊，我的磐石
我所投靠的 神呐！
他是我的盾牌
是拯救我的角

[Chorus]
磐石之上，我站立
风雨飘摇，我不惧
因你同在，我刚强
哈利路亚，赞美你

[Verse 3]
耶和华是我的牧者
我必不至缺罚
他使我躺卧在青草弟
领我在可安歇的水边

[Chorus]
磐石之上，我站立
风雨飘摇，我不惧
因你同在，我刚强
哈利路亚，赞美你

[Bridge]
我的罪，你已赦免 (赦免)
我的病，你已医治 (医治)
我的心，你来安慰 (安慰)
我的灵，你来充满 (充满)

[Chorus]
磐石之上，我站立
风雨飘摇，我不惧
因你同在，我刚强
哈利路亚，赞美你

[Outro]
磐石之上
永不动摇
""",
    ),
)

TAG_CHEAT_SHEET: tuple[TagHint, ...] = (
    TagHint("[Intro]", "前奏 (纯音乐/氛围)"),
    TagHint("[Verse]", "主歌 (叙事)"),
    TagHint("[Pre-Chorus]", "导歌 (情绪过渡)"),
    TagHint("[Chorus]", "副歌 (高潮/钩子)"),
    TagHint("[Bridge]", "桥段 (突破/升华)"),
    TagHint("[Interlude]", "间奏"),
    TagHint("[Outro]", "尾声/祷告"),
    TagHint("[Instrumental]", "纯乐器演奏"),
    TagHint("(x2)", "重复两次"),
)

STARTER_LYRICS = """\
[Intro]
(Piano and soft strings, atmospheric)

[Verse 1]
在这里写下你的歌词...
(Write your lyrics here...)

[Chorus]
..."""


def get_example(index: int) -> ExampleLyric:
    """Return an example by its 1-based position."""
    if not 1 <= index <= len(EXAMPLE_LYRICS):
        raise IndexError(f"Example {index} out of range (1-{len(EXAMPLE_LYRICS)})")
    return EXAMPLE_LYRICS[index - 1]
