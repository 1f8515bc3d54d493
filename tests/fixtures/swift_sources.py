"""Swift snippets shared by parser, patcher and pipeline tests."""

OVERLOADS = """\
import Foundation

func foo(x: Int) -> Int {
    return x * 2
}

func foo(y: String) -> String {
    return y + y
}
"""

CALCULATOR = """\
import Foundation

/// Adds two numbers.
func add(_ a: Int, _ b: Int) -> Int {
    return a + b
}

struct Calculator {
    var total: Int = 0

    // running sum
    mutating func accumulate(_ value: Int) {
        total += value
    }

    func reset() -> Calculator {
        return Calculator()
    }
}

protocol Shape {
    func area() -> Double
}

extension Calculator {
    init(start: Int) {
        self.total = start
    }
}
"""

GREETER = """\
struct Greeter {
    let name: String

    func greet() -> String {
        return "Hello, " + name
    }

    func farewell() -> String {
        return "Bye"
    }
}
"""
