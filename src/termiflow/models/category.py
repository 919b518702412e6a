"""预置话题分类（只读参考数据）."""

from pydantic import BaseModel


class Category(BaseModel):
    """话题分类."""

    name: str
    display_name: str
    description: str
    default_rss: list[str] = []
    keywords: list[str] = []


DEFAULT_CATEGORIES: list[Category] = [
    Category(
        name="silicon-chips",
        display_name="Silicon & Semiconductors",
        description="Chip fabrication, lithography, semiconductor industry news",
        keywords=[
            "semiconductor",
            "chip fabrication",
            "TSMC",
            "Intel",
            "Samsung foundry",
            "EUV lithography",
            "nm process node",
        ],
        default_rss=[
            "https://semianalysis.com/feed/",
            "https://www.anandtech.com/rss/",
        ],
    ),
    Category(
        name="rust-lang",
        display_name="Rust Programming",
        description="Rust language updates, crates, ecosystem news",
        keywords=["rust programming", "rust lang", "crates.io", "rust async", "rust embedded"],
    ),
    Category(
        name="llm-inference",
        display_name="LLM & AI Inference",
        description="Large language models, inference optimization, AI deployment",
        keywords=[
            "LLM inference",
            "transformer optimization",
            "quantization",
            "GGUF",
            "vLLM",
            "TensorRT-LLM",
        ],
    ),
    Category(
        name="webgpu",
        display_name="WebGPU & Graphics",
        description="WebGPU, browser graphics, GPU compute on the web",
        keywords=["WebGPU", "WGSL", "browser GPU", "web graphics"],
    ),
    Category(
        name="systems-programming",
        display_name="Systems Programming",
        description="OS development, compilers, low-level programming",
        keywords=[
            "operating systems",
            "compiler design",
            "LLVM",
            "systems programming",
            "kernel",
        ],
    ),
    Category(
        name="kubernetes",
        display_name="Kubernetes & Cloud Native",
        description="K8s, containers, cloud-native infrastructure",
        keywords=["kubernetes", "k8s", "containers", "cloud native", "CNCF"],
    ),
]


def get_category_by_name(name: str) -> Category | None:
    """按名称精确查找分类."""
    for category in DEFAULT_CATEGORIES:
        if category.name == name:
            return category
    return None
